"""
Crée les tables de la base de données configurée (DATABASE_URL).
Usage : python init_db.py (depuis le dossier backend)
"""

import logging

from app.database import engine, init_db

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    logging.getLogger(__name__).info("Base prête : %s", engine.url.render_as_string(hide_password=True))
