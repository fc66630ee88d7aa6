"""
Main entrypoint for the YelpCamp API.

Usage:
    Configure through environment variables (DB_URL, SESSION_SECRET, ADMIN_CODE,
    SMTP_HOST, SMTP_USER, SMTP_PASSWORD, ...) and run `python main.py`.
"""
import os

import uvicorn

from src.api.app import create_app
from src.config import Settings
from src.db.database import create_tables, make_engine

def main():
    """
    Main function to start the API server.
    """
    try:
        settings = Settings.from_env()
        engine = make_engine(settings.database_url)

        # Initialize database tables
        create_tables(engine)

        app = create_app(settings, engine=engine)
        host = os.getenv("HOST", "0.0.0.0")
        port = int(os.getenv("PORT", "3000"))
        print(f"YelpCamp API listening on {host}:{port}")
        uvicorn.run(app, host=host, port=port)

        return 0
    except Exception as e:
        print(f"An error occurred in the main function: {str(e)}")
        return 1


if __name__ == "__main__":
    exit_code = main()
    print(f"Exiting with code {exit_code}")
