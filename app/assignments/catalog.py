"""Build the checklist catalogue from checklist form files."""
import logging
import re
from pathlib import Path

from sqlmodel import Session, select

from app.models import Checklist, ChecklistType

logger = logging.getLogger(__name__)


def checklist_type_from_filename(filename: str) -> ChecklistType | None:
    lowered = filename.lower()
    for checklist_type in ChecklistType:
        if checklist_type.value in lowered:
            return checklist_type
    return None


def checklist_from_filename(filename: str) -> Checklist | None:
    """
    Create an (unsaved) Checklist from a form filename.

    Expected format:
        01_Clean_Break_Room_Daily.html

    The leading number is the display order and the remaining underscore
    separated words form the title. Files whose name does not mention
    daily, weekly or quarterly are not checklists and return None.
    """
    checklist_type = checklist_type_from_filename(filename)
    if checklist_type is None:
        return None

    stem = re.sub(r"\.html?$", "", filename, flags=re.IGNORECASE)
    order_part, _, title_part = stem.partition("_")
    try:
        order = int(order_part)
    except ValueError:
        order = 0
        title_part = stem

    title = " ".join(word for word in title_part.split("_") if word)
    return Checklist(filename=filename, title=title, type=checklist_type, order=order)


def sync_checklists(session: Session, directory: str | Path) -> dict:
    """
    Add a Checklist row for every form file in ``directory``.

    Existing filenames are left untouched so rotation state survives
    re-seeding. Returns counts of created and skipped files.
    """
    stats = {"created": 0, "existing": 0, "skipped": 0}
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Checklist directory not found: {directory}")
        return stats

    known = set(session.exec(select(Checklist.filename)).all())
    for path in sorted(directory.iterdir()):
        if not path.is_file():
            continue
        if path.name in known:
            stats["existing"] += 1
            continue
        checklist = checklist_from_filename(path.name)
        if checklist is None:
            stats["skipped"] += 1
            continue
        session.add(checklist)
        stats["created"] += 1

    session.commit()
    logger.info(f"Checklist sync completed: {stats}")
    return stats
