from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, BigInteger, ForeignKey, Index
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

class PlayerProfile(Base):
    __tablename__ = 'player_profiles'

    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True)
    username = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100))
    avatar_url = Column(String(500))
    country = Column(String(2))
    level = Column(Integer, default=1)
    is_premium = Column(Boolean, default=False)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=func.now())
    last_login_at = Column(DateTime, nullable=True)

    # Relationships
    scores = relationship("PlayerScore", back_populates="player")

    def __repr__(self):
        return f"<PlayerProfile(id={self.id}, username='{self.username}')>"

class PlayerScore(Base):
    __tablename__ = 'player_scores'

    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True)
    player_id = Column(BigInteger().with_variant(Integer, 'sqlite'), ForeignKey('player_profiles.id'), nullable=False)
    score = Column(Integer, nullable=False)
    region = Column(String(10), nullable=False)
    game_mode = Column(String(50))
    created_at = Column(DateTime, nullable=False, default=func.now())

    # Relationships
    player = relationship("PlayerProfile", back_populates="scores")

    # Ranking indexes. Column order matches the ORDER BY of the top-K queries
    # (score DESC, player_id, id) so both are served by an ordered index scan.
    __table_args__ = (
        Index('idx_score', score.desc(), player_id, id),
        Index('idx_region_score', region, score.desc(), player_id, id),
        Index('idx_created_at', created_at.desc()),
        Index('idx_game_mode', game_mode),
    )

    def __repr__(self):
        return f"<PlayerScore(player_id={self.player_id}, score={self.score}, region='{self.region}')>"

# Indexes the ranking queries depend on
RANKING_INDEXES = ('idx_score', 'idx_region_score')
