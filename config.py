import os
from dotenv import load_dotenv
load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///app.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DRAFT_MAX_LENGTH = int(os.getenv("DRAFT_MAX_LENGTH", 2000))  # drafts live in the session cookie
    TEACHER_SEED_PASSWORD = os.getenv("TEACHER_SEED_PASSWORD", "teacher123")
    STUDENT_SEED_PASSWORD = os.getenv("STUDENT_SEED_PASSWORD", "student123")
    INIT_TOKEN = os.getenv("INIT_TOKEN")
