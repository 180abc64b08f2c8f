from matchpairs import db
from datetime import datetime, timezone
import json
import uuid


def generate_session_id():
    """Opaque, unguessable session token."""
    return uuid.uuid4().hex


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.String(32), primary_key=True, default=generate_session_id)
    created_at_ms = db.Column(db.BigInteger, nullable=False)
    deck = db.Column(db.Text, nullable=False)  # JSON-encoded list of symbols
    revealed = db.Column(db.Text, nullable=False, default='[]')  # JSON-encoded list of positions
    matched = db.Column(db.Text, nullable=False, default='[]')  # JSON-encoded list of positions
    matched_count = db.Column(db.Integer, nullable=False, default=0)
    move_count = db.Column(db.Integer, nullable=False, default=0)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at_ms = db.Column(db.BigInteger, nullable=True)
    last_move_at_ms = db.Column(db.BigInteger, nullable=True)
    # Completion declared by the client instead of observed move by move
    client_reported = db.Column(db.Boolean, nullable=False, default=False)
    retired = db.Column(db.Boolean, nullable=False, default=False, index=True)
    retired_at_ms = db.Column(db.BigInteger, nullable=True)
    version_id = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version_id}

    @property
    def cards(self):
        return json.loads(self.deck)

    @property
    def card_count(self):
        return len(self.cards)

    @property
    def pair_count(self):
        return self.card_count // 2

    @property
    def revealed_positions(self):
        return json.loads(self.revealed or '[]')

    @revealed_positions.setter
    def revealed_positions(self, positions):
        self.revealed = json.dumps(list(positions))

    @property
    def matched_positions(self):
        return json.loads(self.matched or '[]')

    @matched_positions.setter
    def matched_positions(self, positions):
        self.matched = json.dumps(sorted(positions))

    @property
    def elapsed_ms(self):
        if self.completed_at_ms is None:
            return None
        return self.completed_at_ms - self.created_at_ms

    @property
    def state(self):
        if self.retired:
            return 'retired'
        if self.completed:
            return 'completed'
        if self.move_count or self.revealed_positions:
            return 'in_progress'
        return 'created'

    def to_dict(self):
        """Public progress view; never includes symbols."""
        return {
            'session_id': self.id,
            'state': self.state,
            'card_count': self.card_count,
            'move_count': self.move_count,
            'matched_count': self.matched_count,
            'matched': self.matched_positions,
            'completed': self.completed,
            'retired': self.retired,
        }


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_entry'
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(32), unique=True, nullable=False)
    name = db.Column(db.String(64), nullable=False)
    elapsed_ms = db.Column(db.BigInteger, nullable=False)
    move_count = db.Column(db.Integer, nullable=False)
    country = db.Column(db.String(16), nullable=False)
    submitted_at_ms = db.Column(db.BigInteger, nullable=False)

    __table_args__ = (
        db.Index('ix_leaderboard_rank', 'elapsed_ms', 'submitted_at_ms', 'id'),
    )

    # Position in the ranking when the entry was recorded; not persisted
    rank = None

    def to_dict(self, rank=None):
        rank = self.rank if rank is None else rank
        submitted = datetime.fromtimestamp(self.submitted_at_ms / 1000.0, tz=timezone.utc)
        payload = {
            'id': self.id,
            'name': self.name,
            'time': self.elapsed_ms,
            'moves': self.move_count,
            'country': self.country,
            'date': submitted.isoformat().replace('+00:00', 'Z'),
        }
        if rank is not None:
            payload['rank'] = rank
        return payload
