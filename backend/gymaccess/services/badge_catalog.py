"""Default badge catalog and idempotent seeding."""

import logging

from sqlalchemy.orm import Session

from gymaccess.models.gamification import Badge, BadgeRarity

logger = logging.getLogger(__name__)

RARITY_POINTS = {
    BadgeRarity.COMMON: 50,
    BadgeRarity.RARE: 150,
    BadgeRarity.EPIC: 500,
    BadgeRarity.LEGENDARY: 1000,
}

# (name, description, icon, rarity)
DEFAULT_BADGES = [
    ("First Entry", "Welcome to the gym! Your first visit is complete.", "🎯", BadgeRarity.COMMON),
    ("Early Bird", "You love working out in the morning hours.", "🌅", BadgeRarity.COMMON),
    ("Night Owl", "You prefer late-night workout sessions.", "🦉", BadgeRarity.COMMON),
    ("Weekend Warrior", "You make the most of your weekend workouts.", "⚔️", BadgeRarity.COMMON),
    ("Consistent Visitor", "You visit the gym regularly and maintain consistency.", "📅", BadgeRarity.COMMON),
    ("Gym Regular", "You're a familiar face around here.", "🏋️", BadgeRarity.COMMON),
    ("Flexibility Fan", "You prioritize flexibility and mobility.", "🧘", BadgeRarity.COMMON),
    ("Cardio Champion", "You excel at cardiovascular exercises.", "❤️", BadgeRarity.COMMON),
    ("Top 10 Weekly", "You're in the top 10 most active members this week!", "🏆", BadgeRarity.RARE),
    ("Monthly Champion", "You've visited 20 times this month!", "🥇", BadgeRarity.RARE),
    ("Fitness Enthusiast", "Your passion for fitness is truly inspiring.", "💪", BadgeRarity.RARE),
    ("Motivation Master", "You motivate others with your dedication.", "🔥", BadgeRarity.RARE),
    ("Strength Seeker", "You're focused on building strength and power.", "💥", BadgeRarity.RARE),
    ("Wellness Warrior", "You approach fitness holistically.", "🛡️", BadgeRarity.RARE),
    ("Health Hero", "You're a champion of health and wellness.", "🦸", BadgeRarity.RARE),
    ("Gym Guru", "You're knowledgeable about fitness and training.", "🧙", BadgeRarity.RARE),
    ("Annual Member", "Congratulations on your annual membership commitment!", "⭐", BadgeRarity.EPIC),
    ("Streak Master", "You've maintained a 30-day streak!", "🔥", BadgeRarity.EPIC),
    ("Fitness Fanatic", "Your love for fitness knows no bounds.", "🎪", BadgeRarity.EPIC),
    ("Workout Wizard", "You have magical workout skills.", "🪄", BadgeRarity.EPIC),
    ("Peak Performer", "You consistently perform at your peak.", "⛰️", BadgeRarity.EPIC),
    ("Solo Warrior", "You prefer to train alone and focus on your goals.", "⚔️", BadgeRarity.EPIC),
    ("Morning Person", "You're always the first one at the gym.", "🌅", BadgeRarity.EPIC),
    ("Iron Will", "Your determination is unbreakable.", "💪", BadgeRarity.EPIC),
    ("Gym Legend", "You are a true legend of the gym!", "👑", BadgeRarity.LEGENDARY),
    ("Century Club", "You've visited the gym 100 times!", "💯", BadgeRarity.LEGENDARY),
    ("Unstoppable Force", "Nothing can stop your fitness journey.", "🚀", BadgeRarity.LEGENDARY),
    ("Fitness Deity", "You have achieved god-like fitness status.", "⚡", BadgeRarity.LEGENDARY),
    ("The Immortal", "Your dedication to fitness is eternal.", "♾️", BadgeRarity.LEGENDARY),
]


def seed_badges(db: Session) -> int:
    """Insert catalog badges missing by name. Returns the number created."""
    existing = {name for (name,) in db.query(Badge.name)}
    created = 0
    for name, description, icon, rarity in DEFAULT_BADGES:
        if name in existing:
            continue
        db.add(Badge(
            name=name,
            description=description,
            icon_url=icon,
            rarity=rarity,
            point_value=RARITY_POINTS[rarity],
        ))
        created += 1
    db.commit()
    if created:
        logger.info(f"Badge catalog: created {created} badges")
    return created
