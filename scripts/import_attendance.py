import csv
import sys
from datetime import date
from sqlalchemy.orm import Session
from database.db import SessionLocal
from models.attendance import AttendanceRecord as AttendanceModel  # ✅ 모델 import

CSV_PATH = "data/attendance.csv"  # ✅ 파일 경로

# ✅ 상태 매핑 (한글 → 영문)
STATUS_MAP = {
    "출석": "present",
    "결석": "absent",
    "지각": "late",
    "인정결석": "excused",
}

def migrate_attendance(csv_path: str = CSV_PATH):
    db: Session = SessionLocal()

    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                attendance = AttendanceModel(
                    school_id=int(row["school_id"]),                     # 학교 ID
                    class_id=int(row["class_id"]),                       # 학급 ID
                    student_id=int(row["student_id"]),                   # 학생 ID
                    date=date.fromisoformat(row["date"]),                # 날짜
                    status=STATUS_MAP.get(row["status"], row["status"]), # 출결 상태
                    session=row.get("session") or "full-day",            # 세션
                    academic_year=row.get("academic_year"),
                    term=row.get("term"),
                )
                db.add(attendance)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    print("✅ 출결 CSV → DB 마이그레이션 완료")

if __name__ == "__main__":
    migrate_attendance(sys.argv[1] if len(sys.argv) > 1 else CSV_PATH)
