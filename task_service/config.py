import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------
# Database
# ---------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./task_service.db")

# ---------------------------------------------------------
# Tokens
# ---------------------------------------------------------
JWT_SECRET = os.getenv("JWT_SECRET", "demo_secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXP_DAYS = 30

# ---------------------------------------------------------
# Passwords & roles
# ---------------------------------------------------------
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))
ALLOW_ADMIN_SIGNUP = os.getenv("ALLOW_ADMIN_SIGNUP", "False") == "True"

# ---------------------------------------------------------
# HTTP
# ---------------------------------------------------------
PORT = int(os.getenv("PORT", "5000"))
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
