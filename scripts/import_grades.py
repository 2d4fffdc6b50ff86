import csv
import sys
from sqlalchemy.orm import Session
from database.db import SessionLocal
from models.grades import GradeRecord as GradeModel  # ✅ 모델 import
from services.grade_workflow import letter_grade_for

CSV_PATH = "data/grades.csv"  # ✅ 파일 경로

def migrate_grades(csv_path: str = CSV_PATH):
    db: Session = SessionLocal()

    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                score = float(row["score"])
                max_score = float(row.get("max_score") or 100)
                percentage = score / max_score * 100
                grade = GradeModel(
                    school_id=int(row["school_id"]),            # 학교 ID
                    student_id=int(row["student_id"]),          # 학생 ID
                    subject_id=int(row["subject_id"]),          # 과목 ID
                    class_id=int(row["class_id"]),              # 학급 ID
                    score=score,                                # 원점수
                    max_score=max_score,                        # 만점
                    percentage=percentage,
                    letter_grade=row.get("letter_grade") or letter_grade_for(percentage),
                    status=row.get("status") or "draft",        # 워크플로 상태
                    term=row["term"],                           # 학기
                    exam_type=row.get("exam_type"),             # 예: MIDTERM
                    academic_year=row["academic_year"],         # 학년도
                )
                db.add(grade)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    print("✅ 성적 CSV → DB 마이그레이션 완료")

if __name__ == "__main__":
    migrate_grades(sys.argv[1] if len(sys.argv) > 1 else CSV_PATH)
