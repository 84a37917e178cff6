"""Flaskアプリ全体の初期化処理とCLIコマンドを提供するモジュール。"""

import logging
from datetime import date
from typing import Optional, Union

from flask import Flask, jsonify
import click

from dotenv import load_dotenv

from .extensions import db, login_manager, migrate


def configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("rent_ledger").setLevel(level)


def create_app(config_object: Optional[Union[str, type]] = None) -> Flask:
    """家賃台帳アプリケーションのアプリケーションファクトリ。"""
    load_dotenv()

    app = Flask(__name__)
    config_path = config_object or "config.Config"
    app.config.from_object(config_path)
    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from .models import User  # noqa: WPS433

    @login_manager.user_loader
    def load_user(user_id: str) -> Optional[User]:
        if not user_id.isdigit():
            return None
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required."}), 401

    from .blueprints.auth.routes import auth_bp
    from .blueprints.ledger.routes import ledger_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(ledger_bp)

    from .seed import seed_data

    @app.cli.command("seed-data")
    @click.option("--with-reset", is_flag=True, help="既存データを全て削除してから投入します")
    def seed_data_command(with_reset: bool) -> None:
        """サンプルの物件・入居者・契約と家賃台帳を生成します。"""
        seed_data(with_reset=with_reset)
        click.echo("Seed data generation completed.")

    @app.cli.command("generate-dues")
    @click.option(
        "--today",
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        help="基準日（省略時は実行日）",
    )
    def generate_dues_command(today) -> None:
        """経過済みの月について不足している家賃レコードを補完します。"""
        from .repository import SqlAlchemyLedgerRepository
        from .services import sync_dues

        reference = today.date() if today else date.today()
        result = sync_dues(
            SqlAlchemyLedgerRepository(),
            today=reference,
            due_day=app.config["RENT_DUE_DAY"],
        )
        click.echo(f"Created {result.new_count} rent due record(s).")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.password_option()
    def create_user_command(email: str, password: str) -> None:
        """ログイン用ユーザーを登録します。"""
        user = User(email=email.lower())
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created user {user.email}.")

    return app
