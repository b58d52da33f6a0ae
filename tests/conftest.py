import os

# 테스트는 실제 PostgreSQL 없이 실행
os.environ["DATABASE_URI"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ACCRUAL_SYSTEM_ADDRESS"] = ""
