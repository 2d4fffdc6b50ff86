from database.init_db import init_db


if __name__ == "__main__":
    init_db()
    print("✅ 테이블 생성 완료")
