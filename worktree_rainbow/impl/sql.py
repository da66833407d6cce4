from pathlib import Path
from typing import Any, Callable

from sqlalchemy import String, create_engine, delete, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from worktree_rainbow.base import AssignmentStore, Color, color_key

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "worktree-rainbow" / "colors.db"


class Base(DeclarativeBase):
    pass


class AssignmentModel(Base):
    __tablename__ = "assignments"
    key: Mapped[str] = mapped_column(primary_key=True)
    color: Mapped[str] = mapped_column(String(7), nullable=False)


class SqlAssignmentStore(AssignmentStore):
    def __init__(self, session_maker: Callable[[], Session]) -> None:
        self.session_maker = session_maker

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("SqlAssignmentStore(...)")
        else:
            with p.group(4, "SqlAssignmentStore(", ")"):
                p.breakable()
                p.text(f"session_maker={self.session_maker},")
                p.breakable()

    def get(self, repo_root: str, branch: str) -> Color | None:
        stmt = select(AssignmentModel.color).where(
            AssignmentModel.key == color_key(repo_root, branch)
        )
        with self.session_maker() as session:
            return session.execute(stmt).scalar_one_or_none()

    def put(self, repo_root: str, branch: str, color: Color) -> None:
        key = color_key(repo_root, branch)
        with self.session_maker() as session, session.begin():
            item = session.get(AssignmentModel, key)
            if item is None:
                session.add(AssignmentModel(key=key, color=color))
            else:
                item.color = color

    def delete(self, repo_root: str, branch: str) -> None:
        stmt = delete(AssignmentModel).where(
            AssignmentModel.key == color_key(repo_root, branch)
        )
        with self.session_maker() as session, session.begin():
            session.execute(stmt)


def create_sql_assignment_store(db_url: str | None = None) -> SqlAssignmentStore:
    if db_url is None:
        DEFAULT_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        db_url = f"sqlite:///{DEFAULT_DB_PATH}"

    connect_args = {}
    if db_url.startswith("sqlite"):
        # Backend calls run on worker threads
        connect_args["check_same_thread"] = False

    engine = create_engine(db_url, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return SqlAssignmentStore(sessionmaker(bind=engine))
