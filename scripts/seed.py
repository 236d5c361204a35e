from pathlib import Path

import yaml
from sqlalchemy import delete

from slipgen.api.schemas import SlipCreateRequest
from slipgen.db import crud, models
from slipgen.db.session import SessionLocal


def load_slip_payloads(path: Path) -> list[SlipCreateRequest]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return [SlipCreateRequest.model_validate(item) for item in raw.get("slips", [])]


def main() -> None:
    db = SessionLocal()
    try:
        payloads = load_slip_payloads(Path("data/sample_slips.yaml"))
        db.execute(delete(models.Slip))
        created = [crud.create_slip(db, fields=payload.model_dump()) for payload in payloads]
        db.commit()
        for slip in created:
            print(f"Seeded slip id={slip.id} name={slip.first_name} {slip.last_name} type={slip.appointment_type.value}")
        print(f"Seed complete: slips={len(created)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
