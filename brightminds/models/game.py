"""Library Game Model"""

from sqlalchemy import Column, Enum, Integer, String, Text

from brightminds.models.base import BaseModel, TimestampMixin
from brightminds.models.enums import GameDifficulty, enum_values


class Game(BaseModel, TimestampMixin):
    """
    Catalog entry for a pre-made game, reusable across classrooms.
    """
    __tablename__ = "games"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    grade_level = Column(Integer, nullable=True)
    difficulty = Column(
        Enum(GameDifficulty, name="game_difficulty", values_callable=enum_values),
        nullable=True,
    )
    game_url_or_identifier = Column(String(500), nullable=True)
    max_xp_awarded = Column(Integer, nullable=True)
    total_points_possible = Column(Integer, nullable=True)

    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return f"<Game {self.title}>"
