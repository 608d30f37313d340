"""Client-side services: auth, profile, onboarding, dashboard stats, AI and media."""

from notely.services.auth import AuthService
from notely.services.media import MediaUploader
from notely.services.onboarding import PREFERENCE_OPTIONS, OnboardingFlow, OnboardingStep
from notely.services.profile import ProfileService
from notely.services.sentiment import SentimentAnalysis, SentimentService
from notely.services.stats import DashboardStats, dashboard_stats

__all__ = [
    "AuthService",
    "DashboardStats",
    "MediaUploader",
    "OnboardingFlow",
    "OnboardingStep",
    "PREFERENCE_OPTIONS",
    "ProfileService",
    "SentimentAnalysis",
    "SentimentService",
    "dashboard_stats",
]
