"""
Submission controller: binds a finished roster to a contest exactly once.

Phases move EMPTY -> BUILDING -> READY_TO_SUBMIT -> SUBMITTED, and
reset_submission() returns SUBMITTED -> BUILDING. All local validation happens
before the gateway is called; SUBMITTED is only entered after the gateway has
returned a verified Submission.

The roster is locked for the whole attempt. A timed out or cancelled attempt
stays in flight until its gateway call has actually finished, so a retry can
never overlap a save that is still running.
"""

import asyncio
from typing import Callable, Iterable, Optional

from ..config.defaults import SubmissionParams
from ..data.models import ELIGIBLE_CONTEST_STATES, Contest, Submission
from ..errors import (
    DuplicateSubmissionError,
    EmptyRosterError,
    IncompleteRosterError,
    InvalidContestStateError,
    OwnerIdentityMissingError,
    PartialSubmissionError,
    PersistenceError,
    SubmissionTimeoutError,
)
from ..logging.config import get_state_logger, log_state_transition
from ..persistence.base import SubmissionGateway
from .models import RosterEvent, RosterPhase, derive_phase
from .roster import RosterManager

state_logger = get_state_logger(__name__)

PhaseListener = Callable[[RosterPhase], None]


class SubmissionController:
    """Drives one roster through validation, persistence and reset."""

    def __init__(
        self,
        roster: RosterManager,
        gateway: SubmissionGateway,
        owner_identity: Optional[str] = None,
        params: Optional[SubmissionParams] = None
    ):
        self.roster = roster
        self.gateway = gateway
        self.params = params or SubmissionParams()
        self.logger = state_logger.bind(roster_id=roster.roster_id)

        self._owner_identity = owner_identity
        self._is_submitted = False
        self._in_flight = False
        self._reopened = False
        self._last_submission: Optional[Submission] = None
        self._listeners: list[PhaseListener] = []
        self._last_phase = self.phase

        roster.subscribe(self._on_roster_change)

    @property
    def phase(self) -> RosterPhase:
        phase = derive_phase(self.roster.size, self.roster.max_size, self._is_submitted)
        # A reset roster reads as BUILDING until the user touches it again
        if self._reopened and phase == RosterPhase.READY_TO_SUBMIT:
            return RosterPhase.BUILDING
        return phase

    @property
    def is_submitted(self) -> bool:
        return self._is_submitted

    @property
    def is_submitting(self) -> bool:
        """True while a gateway save is running, including one whose caller gave up."""
        return self._in_flight

    @property
    def last_submission(self) -> Optional[Submission]:
        return self._last_submission

    @property
    def owner_identity(self) -> Optional[str]:
        return self._owner_identity

    def set_owner_identity(self, owner_identity: Optional[str]) -> None:
        self._owner_identity = owner_identity

    def list_eligible_contests(self, contests: Iterable[Contest]) -> list[Contest]:
        """Contests that accept entries, in catalog order."""
        return [c for c in contests if c.state in ELIGIBLE_CONTEST_STATES]

    def validate(self, contest: Contest) -> None:
        """
        Run every local precondition for submit().

        Raises:
            DuplicateSubmissionError: Already submitted or an attempt is in flight
            EmptyRosterError: Roster has no selections
            IncompleteRosterError: Full roster required and not reached
            InvalidContestStateError: Contest is finished
            OwnerIdentityMissingError: No submitter identity connected
        """
        if self._in_flight:
            raise DuplicateSubmissionError(
                "A submission is already in progress", in_flight=True
            )
        if self._is_submitted:
            raise DuplicateSubmissionError(
                "Roster already submitted; reset before submitting again",
                context={"submission_id": self._last_submission.submission_id
                         if self._last_submission else None}
            )
        if self.roster.is_empty():
            raise EmptyRosterError("Cannot submit an empty roster")
        if self.params.require_full_roster and not self.roster.is_full():
            raise IncompleteRosterError(
                f"Roster needs {self.roster.max_size} selections, has {self.roster.size}",
                required_size=self.roster.max_size,
                actual_size=self.roster.size
            )
        if contest.state not in ELIGIBLE_CONTEST_STATES:
            raise InvalidContestStateError(
                f"Contest {contest.id} is {contest.state.value} and does not accept entries",
                contest_id=contest.id,
                contest_state=contest.state.value
            )
        if not self._owner_identity or not self._owner_identity.strip():
            raise OwnerIdentityMissingError("No owner identity connected")

    async def submit(self, contest: Contest) -> Submission:
        """
        Persist the current roster against a contest.

        Returns:
            The stored Submission

        Raises:
            SubmissionError subclasses: Local validation failed; gateway not called
            SubmissionTimeoutError: Gateway did not answer within timeout_seconds
            PartialSubmissionError: Gateway result does not match the roster
            PersistenceError: Gateway failed
            asyncio.CancelledError: Caller cancelled; state unchanged

        After a timeout or cancellation the gateway call keeps running in its
        worker thread. is_submitting stays True and the roster stays locked
        until it finishes; its late result is logged and discarded.
        """
        self.validate(contest)

        snapshot = self.roster.selections
        owner = self._owner_identity
        self.roster.lock()
        self._set_in_flight(True)

        self.logger.info(
            "Submitting roster",
            contest_id=contest.id,
            selection_count=len(snapshot),
            timeout_seconds=self.params.timeout_seconds
        )

        worker = asyncio.ensure_future(
            asyncio.to_thread(
                self.gateway.save_submission,
                snapshot,
                contest.id,
                owner,
                self.params.team_name,
            )
        )

        try:
            submission = await asyncio.wait_for(
                asyncio.shield(worker),
                timeout=self.params.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            self.logger.error(
                "Submission timed out",
                contest_id=contest.id,
                timeout_seconds=self.params.timeout_seconds
            )
            worker.add_done_callback(self._release_abandoned)
            raise SubmissionTimeoutError(
                f"Submission did not complete within {self.params.timeout_seconds}s",
                timeout_seconds=self.params.timeout_seconds,
                operation="save_submission"
            ) from e
        except asyncio.CancelledError:
            self.logger.warning("Submission cancelled", contest_id=contest.id)
            worker.add_done_callback(self._release_abandoned)
            raise
        except PersistenceError as e:
            self.logger.error(
                "Submission failed",
                contest_id=contest.id,
                error=str(e),
                error_type=type(e).__name__
            )
            self._release_attempt()
            raise
        except Exception:
            self._release_attempt()
            raise

        try:
            self._verify(submission, contest, snapshot)
        except PartialSubmissionError:
            self._release_attempt()
            raise

        self._in_flight = False
        self.mark_submitted(submission)
        return submission

    def _release_attempt(self) -> None:
        """End a failed attempt: unlock the roster and clear the in-flight flag."""
        self.roster.unlock()
        self._set_in_flight(False)

    def _release_abandoned(self, worker: asyncio.Future) -> None:
        if worker.cancelled():
            self.logger.warning("Abandoned submission worker cancelled")
        elif worker.exception() is not None:
            error = worker.exception()
            self.logger.warning(
                "Abandoned submission failed",
                error=str(error),
                error_type=type(error).__name__
            )
        else:
            submission = worker.result()
            self.logger.warning(
                "Abandoned submission completed after the caller gave up",
                submission_id=submission.submission_id,
                contest_id=submission.contest_id
            )
        self._release_attempt()

    def _verify(self, submission: Submission, contest: Contest, snapshot: tuple) -> None:
        if submission.contest_id != contest.id or len(submission.selections) != len(snapshot):
            self.logger.error(
                "Gateway returned an incomplete submission",
                submission_id=submission.submission_id,
                contest_id=contest.id,
                expected_rows=len(snapshot),
                stored_rows=len(submission.selections)
            )
            raise PartialSubmissionError(
                "Stored submission does not match the submitted roster",
                expected_rows=len(snapshot),
                stored_rows=len(submission.selections),
                operation="save_submission",
                context={"submission_id": submission.submission_id}
            )

    def mark_submitted(self, submission: Optional[Submission] = None) -> None:
        """Enter SUBMITTED and lock the roster."""
        from_phase = self.phase
        self._is_submitted = True
        self._reopened = False
        if submission is not None:
            self._last_submission = submission
        self.roster.lock()

        log_state_transition(
            self.logger,
            roster_id=self.roster.roster_id,
            from_state=from_phase.value,
            to_state=RosterPhase.SUBMITTED.value,
            trigger="submitted",
            context={
                "submission_id": submission.submission_id if submission else None,
                "contest_id": submission.contest_id if submission else None,
            }
        )
        self._notify()

    def reset_submission(self) -> None:
        """
        Start a new round: SUBMITTED -> BUILDING.

        The roster keeps its selections so the user edits rather than rebuilds.
        """
        if not self._is_submitted:
            return

        self._is_submitted = False
        self._reopened = True
        self.roster.unlock()

        log_state_transition(
            self.logger,
            roster_id=self.roster.roster_id,
            from_state=RosterPhase.SUBMITTED.value,
            to_state=self.phase.value,
            trigger="reset",
            context={"selection_count": self.roster.size}
        )
        self._notify()

    def subscribe(self, listener: PhaseListener) -> Callable[[], None]:
        """Register a phase listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_in_flight(self, in_flight: bool) -> None:
        self._in_flight = in_flight
        for listener in list(self._listeners):
            listener(self.phase)

    def _on_roster_change(self, event: RosterEvent) -> None:
        self._reopened = False
        phase = self.phase
        if phase == self._last_phase:
            return

        log_state_transition(
            self.logger,
            roster_id=self.roster.roster_id,
            from_state=self._last_phase.value,
            to_state=phase.value,
            trigger=event.kind.value,
            context={"asset_id": event.asset_id, "selection_count": len(event.selections)}
        )
        self._notify()

    def _notify(self) -> None:
        phase = self.phase
        self._last_phase = phase
        for listener in list(self._listeners):
            listener(phase)
