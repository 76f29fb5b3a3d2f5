"""WSGI entry point for Gunicorn."""
import sys
import os

# Ensure the project root is in the Python path so config.py resolves
sys.path.insert(0, os.path.dirname(__file__))

from partstock import create_app

# Create the application instance
app = create_app()

if __name__ == "__main__":
    app.run()
