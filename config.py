"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')

    # Database - DATABASE_URL wins, otherwise a local SQLite file
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_PATH = os.getenv('DB_PATH', os.path.join(os.getcwd(), 'partstock.db'))
        DATABASE_URL = f"sqlite:///{DB_PATH}"

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'
    AUTO_CREATE_SCHEMA = os.getenv('AUTO_CREATE_SCHEMA', 'false').lower() == 'true'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Stock warnings after each committed sale
    LOW_STOCK_LOG_ENABLED = os.getenv('LOW_STOCK_LOG_ENABLED', 'true').lower() == 'true'


class TestingConfig(Config):
    """In-memory database, schema created on startup."""

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    AUTO_CREATE_SCHEMA = True
    LOG_LEVEL = 'DEBUG'
