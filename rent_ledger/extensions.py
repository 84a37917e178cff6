"""アプリ全体で共有する Flask 拡張（DB・マイグレーション・ログイン管理）。"""

from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
