"""
Onboarding Flow.

Four steps shown once after signup: Welcome, Profile, Preferences and
First Note. The flow collects answers locally; ``finish`` sends them to
the API in one PATCH and only then marks onboarding complete in the
SessionStore.
"""

from dataclasses import dataclass
from enum import IntEnum

from notely.client.api import NotelyAPI
from notely.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    ValidationError,
    describe_error,
)
from notely.routing import DASHBOARD_ROUTE
from notely.schemas.note import NoteCreate
from notely.services.base import BaseService
from notely.services.validators import validate_note
from notely.stores.session import SessionStore
from notely.sync.notes import NoteSync

ONBOARDING_FAILED_MESSAGE = "Failed to complete onboarding. Please try again."


class OnboardingStep(IntEnum):
    WELCOME = 0
    PROFILE = 1
    PREFERENCES = 2
    FIRST_NOTE = 3

    @property
    def title(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass(frozen=True)
class PreferenceOption:
    id: str
    label: str


PREFERENCE_OPTIONS: tuple[PreferenceOption, ...] = (
    PreferenceOption("travel", "Travel"),
    PreferenceOption("tech", "Technology"),
    PreferenceOption("food", "Food & Cooking"),
    PreferenceOption("fitness", "Health & Fitness"),
    PreferenceOption("books", "Books & Reading"),
    PreferenceOption("art", "Art & Design"),
    PreferenceOption("business", "Business"),
    PreferenceOption("education", "Education"),
    PreferenceOption("lifestyle", "Lifestyle"),
    PreferenceOption("personal", "Personal"),
    PreferenceOption("music", "Music"),
    PreferenceOption("photography", "Photography"),
)

PREFERENCE_IDS = frozenset(option.id for option in PREFERENCE_OPTIONS)


class OnboardingFlow(BaseService):
    """
    Step-by-step onboarding state for the current user.

    Usage:
        flow = OnboardingFlow(api, session, sync)
        flow.next()
        flow.set_profile(bio="Hello")
        flow.toggle_preference("tech")
        route = await flow.finish(NoteCreate(title="First", synopsis="...", content="..."))
    """

    def __init__(
        self,
        api: NotelyAPI,
        session: SessionStore,
        sync: NoteSync,
        first_note_enabled: bool = True,
    ) -> None:
        super().__init__(api)
        self.session = session
        self.sync = sync
        self.first_note_enabled = first_note_enabled
        self.step = OnboardingStep.WELCOME
        user = session.user
        self.preferences: set[str] = set(user.preferences) if user is not None else set()
        self.bio: str | None = user.bio if user is not None else None
        self.avatar: str | None = user.avatar if user is not None else None

    @property
    def steps(self) -> list[OnboardingStep]:
        if self.first_note_enabled:
            return list(OnboardingStep)
        return [step for step in OnboardingStep if step is not OnboardingStep.FIRST_NOTE]

    @property
    def is_last_step(self) -> bool:
        return self.step == self.steps[-1]

    @property
    def progress(self) -> float:
        """Fraction of steps completed, 0.0 on the first step and 1.0 on the last."""
        return self.steps.index(self.step) / (len(self.steps) - 1)

    def next(self) -> OnboardingStep:
        steps = self.steps
        index = steps.index(self.step)
        if index < len(steps) - 1:
            self.step = steps[index + 1]
        return self.step

    def back(self) -> OnboardingStep:
        steps = self.steps
        index = steps.index(self.step)
        if index > 0:
            self.step = steps[index - 1]
        return self.step

    def toggle_preference(self, preference: str) -> bool:
        """
        Select or deselect a topic.

        Returns:
            True if the topic is now selected

        Raises:
            ValidationError: If the topic is not in the catalogue
        """
        if preference not in PREFERENCE_IDS:
            raise ValidationError(
                "Unknown preference",
                details={"preferences": f"Unknown topic: {preference}"},
            )
        if preference in self.preferences:
            self.preferences.discard(preference)
            return False
        self.preferences.add(preference)
        return True

    def set_profile(self, bio: str | None = None, avatar: str | None = None) -> None:
        if bio is not None:
            self.bio = bio.strip() or None
        if avatar is not None:
            self.avatar = avatar.strip() or None

    async def finish(self, first_note: NoteCreate | None = None) -> str:
        """
        Save the answers and mark onboarding complete.

        The first note, when given, is created after the profile is saved.
        A failure to create it does not undo onboarding; the note store
        keeps the error message.

        Returns:
            The dashboard route

        Raises:
            AuthenticationError: If nobody is logged in
            ValidationError: If the first note is invalid
            ApplicationError: If the API rejects the profile update
        """
        if self.session.user is None or not self.session.is_authenticated:
            raise AuthenticationError("You need to log in first")

        if first_note is not None and self.first_note_enabled:
            self._raise_if_invalid(
                validate_note(first_note.title, first_note.synopsis, first_note.content),
                "Invalid first note",
            )
        else:
            first_note = None

        payload: dict[str, object] = {
            "preferences": sorted(self.preferences),
            "hasCompletedOnboarding": True,
        }
        if self.bio is not None:
            payload["bio"] = self.bio
        if self.avatar is not None:
            payload["avatar"] = self.avatar

        self._log_operation("Completing onboarding", preferences=len(self.preferences))
        self.session.clear_error()
        self.session.set_loading(True)
        try:
            await self.api.update_user(payload)
        except ApplicationError as e:
            self.session.set_error(describe_error(e, ONBOARDING_FAILED_MESSAGE))
            self._log_failure("Onboarding", e)
            raise
        finally:
            self.session.set_loading(False)

        self.session.complete_onboarding(self.preferences)
        profile = {key: value for key, value in (("bio", self.bio), ("avatar", self.avatar)) if value is not None}
        if profile:
            self.session.update_user(**profile)

        if first_note is not None:
            try:
                await self.sync.create_note(first_note)
            except ApplicationError as e:
                self._log_failure("First note", e)

        return DASHBOARD_ROUTE
