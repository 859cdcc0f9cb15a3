"""
Default achievement catalog. Each rule is a (metric, target, reward) tuple
keyed by a stable slug; titles are display text only.
"""

from __future__ import annotations

from dataclasses import dataclass

from learnhub.models.achievement import MetricType


@dataclass(frozen=True)
class AchievementRule:
    key: str
    title: str
    description: str
    icon: str
    badge_color: str
    points: int
    category: str
    metric: MetricType
    target: int


DEFAULT_ACHIEVEMENTS: tuple[AchievementRule, ...] = (
    # Learning
    AchievementRule("first-steps", "First Steps", "Complete your first learning module", "🎯", "#10b981", 50, "Learning", MetricType.MODULES_COMPLETED, 1),
    AchievementRule("getting-started", "Getting Started", "Complete 5 learning modules", "📚", "#3b82f6", 100, "Learning", MetricType.MODULES_COMPLETED, 5),
    AchievementRule("dedicated-learner", "Dedicated Learner", "Complete 10 learning modules", "🎓", "#8b5cf6", 200, "Learning", MetricType.MODULES_COMPLETED, 10),
    AchievementRule("knowledge-master", "Knowledge Master", "Complete 25 learning modules", "👑", "#f59e0b", 500, "Learning", MetricType.MODULES_COMPLETED, 25),
    # Consistency
    AchievementRule("week-warrior", "Week Warrior", "Maintain a 7-day learning streak", "🔥", "#ef4444", 200, "Consistency", MetricType.STREAK_DAYS, 7),
    AchievementRule("monthly-champion", "Monthly Champion", "Maintain a 30-day learning streak", "💎", "#a855f7", 1000, "Consistency", MetricType.STREAK_DAYS, 30),
    AchievementRule("consistency-king", "Consistency King", "Maintain a 100-day learning streak", "🏆", "#fbbf24", 2500, "Consistency", MetricType.STREAK_DAYS, 100),
    # Gaming: score
    AchievementRule("century-scorer", "Century Scorer", "Score 100 points or more in any game", "💯", "#22c55e", 100, "Gaming", MetricType.SCORE_ACHIEVED, 100),
    AchievementRule("high-achiever", "High Achiever", "Score 500 points or more in any game", "🌟", "#06b6d4", 250, "Gaming", MetricType.SCORE_ACHIEVED, 500),
    AchievementRule("legendary-player", "Legendary Player", "Score 1000 points or more in any game", "⚡", "#dc2626", 500, "Gaming", MetricType.SCORE_ACHIEVED, 1000),
    # Gaming: volume and streaks
    AchievementRule("first-game", "First Game", "Play your first learning game", "🎮", "#6366f1", 25, "Gaming", MetricType.GAMES_PLAYED, 1),
    AchievementRule("game-enthusiast", "Game Enthusiast", "Play 10 learning games", "🕹️", "#84cc16", 200, "Gaming", MetricType.GAMES_PLAYED, 10),
    AchievementRule("game-master", "Game Master", "Play 50 learning games", "👾", "#ec4899", 1000, "Gaming", MetricType.GAMES_PLAYED, 50),
    AchievementRule("on-fire", "On Fire", "Win 5 games in a row", "🔥", "#f97316", 150, "Gaming", MetricType.WIN_STREAK, 5),
    # Time (minutes)
    AchievementRule("study-session", "Study Session", "Study for 1 hour total", "⏰", "#14b8a6", 25, "Time", MetricType.STUDY_TIME_MINUTES, 60),
    AchievementRule("knowledge-seeker", "Knowledge Seeker", "Study for 5 hours total", "📖", "#0ea5e9", 100, "Time", MetricType.STUDY_TIME_MINUTES, 300),
    AchievementRule("dedicated-student", "Dedicated Student", "Study for 20 hours total", "🎓", "#7c3aed", 300, "Time", MetricType.STUDY_TIME_MINUTES, 1200),
    AchievementRule("scholar", "Scholar", "Study for 100 hours total", "🏛️", "#b91c1c", 1000, "Time", MetricType.STUDY_TIME_MINUTES, 6000),
    # Social
    AchievementRule("friend-request", "Friend Request", "Add your first friend", "🤝", "#10b981", 50, "Social", MetricType.FRIENDS_ADDED, 1),
    AchievementRule("social-butterfly", "Social Butterfly", "Add 10 friends", "🦋", "#ec4899", 200, "Social", MetricType.FRIENDS_ADDED, 10),
)

# Pre-seeded (incomplete) for every new user so the dashboard has goals to show.
STARTER_ACHIEVEMENT_KEYS: tuple[str, ...] = ("first-steps", "getting-started", "dedicated-learner")
