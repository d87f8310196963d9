import atexit

from django.apps import AppConfig


class ApiConfig(AppConfig):
    name = 'api'

    def ready(self):
        from .db import close_db, init_db
        from .firebase_config import initialize_firebase

        initialize_firebase()
        init_db()
        atexit.register(close_db)
