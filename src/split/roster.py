"""
Participant roster.

An ordered collection of participants keyed by a stable id. Ids come from
a counter and are never reused, so an edit or removal always hits the row
the user meant, whatever its current position.

There is always at least one participant: removing the last one does
nothing.
"""

from typing import Iterable, Iterator, Optional

from src.models.split import Participant


class ParticipantNotFoundError(KeyError):
    """No participant with the given id."""
    pass


class ParticipantRoster:
    """Participants in display (insertion) order."""

    def __init__(
        self,
        currencies: Iterable[str] = ("NGN", "USD", "GBP"),
        default_currency: str = "USD",
    ):
        self._participants: dict[int, Participant] = {}
        self._next_id = 1
        self.default_currency = default_currency

        for currency in currencies:
            self.add(currency=currency)

        if not self._participants:
            self.add()

    def __len__(self) -> int:
        return len(self._participants)

    def __iter__(self) -> Iterator[Participant]:
        return iter(list(self._participants.values()))

    def __contains__(self, participant_id: int) -> bool:
        return participant_id in self._participants

    @property
    def participants(self) -> list[Participant]:
        return list(self._participants.values())

    def get(self, participant_id: int) -> Participant:
        try:
            return self._participants[participant_id]
        except KeyError:
            raise ParticipantNotFoundError(participant_id)

    def add(self, name: str = "", currency: Optional[str] = None) -> Participant:
        """Append a participant with a fresh id."""
        participant = Participant(
            id=self._next_id,
            name=name,
            currency=currency or self.default_currency,
        )
        self._participants[participant.id] = participant
        self._next_id += 1
        return participant

    def remove(self, participant_id: int) -> bool:
        """
        Remove a participant.

        Returns False (and changes nothing) when the id is unknown or it is
        the only participant left.
        """
        if len(self._participants) <= 1 or participant_id not in self._participants:
            return False
        del self._participants[participant_id]
        return True

    def update(
        self,
        participant_id: int,
        name: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Participant:
        """
        Edit a participant in place.

        Raises:
            ParticipantNotFoundError: If the id is unknown
        """
        participant = self.get(participant_id)
        if name is not None:
            participant.name = name
        if currency is not None:
            participant.currency = currency
        return participant

    def snapshot(self) -> list[Participant]:
        """Copies of the current participants, for building a request."""
        return [p.model_copy() for p in self._participants.values()]
