#!/usr/bin/env python3
"""
IdeaHub API - Startup Script
Creates missing tables and starts the server
"""
import os
import sys
import subprocess
from pathlib import Path

REQUIRED_VARS = ["DATABASE_URL", "SECRET_KEY"]


def run_command(cmd, description=""):
    """Run a command and handle errors"""
    try:
        print(f"{description}...")
        result = subprocess.run(cmd, check=True, capture_output=True, text=True)
        if result.stdout:
            print(result.stdout)
        print(f"{description} completed")
        return True
    except subprocess.CalledProcessError as e:
        print(f"{description} failed!")
        print(f"Error: {e.stderr}")
        return False


def main():
    print("IdeaHub API Startup")
    print("===================")

    from dotenv import load_dotenv
    load_dotenv()

    missing_vars = [var for var in REQUIRED_VARS if not os.getenv(var)]
    if missing_vars:
        print(f"Missing environment variables: {missing_vars}")
        print("Falling back to development defaults (local SQLite, insecure secret).")

    if not run_command([sys.executable, "migrate.py"], "Database migration"):
        print("Tip: Make sure your database is running and your DATABASE_URL is correct.")
        sys.exit(1)

    print("\nStarting FastAPI server...")
    print("Server will be available at: http://localhost:8000")
    print("API docs will be available at: http://localhost:8000/docs")

    try:
        subprocess.run([sys.executable, "-m", "uvicorn", "app.main:app", "--reload",
                        "--host", "0.0.0.0", "--port", "8000"])
    except KeyboardInterrupt:
        print("\nServer stopped.")


if __name__ == "__main__":
    os.chdir(Path(__file__).parent)
    main()
