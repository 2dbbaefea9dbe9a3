"""The fixed progression catalog, ordered by id with no gaps."""

from typing_tutor.models.level import ContentFocus, Level, LevelRequirements, LevelRewards
from typing_tutor.models.session import ContentType, Difficulty

WORDS = ContentType.WORDS
SENTENCES = ContentType.SENTENCES
STORIES = ContentType.STORIES
EASY = Difficulty.EASY
MEDIUM = Difficulty.MEDIUM
HARD = Difficulty.HARD


LEVELS: tuple[Level, ...] = (
    Level(
        id=1,
        name="Keyboard Explorer",
        title="Level 1: Keyboard Explorer",
        description="Learning the basics of typing. Starting with simple letters and words.",
        icon="🔍",
        color="from-green-400 to-emerald-500",
        requirements=LevelRequirements(
            min_accuracy=70, min_sessions=3, min_words_typed=25, min_consistency=50,
        ),
        content_focus=ContentFocus(
            types=(WORDS,),
            difficulty=(EASY,),
            recommended_difficulty=EASY,
            focus_areas=("Home row letters", "Common letters (a, e, i, o, t, s)"),
        ),
        rewards=LevelRewards(
            badge="🌟",
            celebration_message=(
                "You found your way around the keyboard! Time to practice more words!"
            ),
            unlocks=("Words practice", "Easy difficulty"),
        ),
    ),
    Level(
        id=2,
        name="Letter Master",
        title="Level 2: Letter Master",
        description="Building confidence with all letters. Practicing more complex words.",
        icon="✍️",
        color="from-blue-400 to-cyan-500",
        requirements=LevelRequirements(
            min_accuracy=75, min_sessions=5, min_words_typed=50, min_consistency=60,
        ),
        content_focus=ContentFocus(
            types=(WORDS,),
            difficulty=(EASY, MEDIUM),
            recommended_difficulty=MEDIUM,
            focus_areas=("All lowercase letters", "Longer words", "Letter combinations"),
        ),
        rewards=LevelRewards(
            badge="📝",
            celebration_message="You mastered the letters! Ready to build sentences?",
            unlocks=("Medium difficulty words", "Sentence practice"),
        ),
    ),
    Level(
        id=3,
        name="Word Builder",
        title="Level 3: Word Builder",
        description="Mastering words and starting to build sentences.",
        icon="🏗️",
        color="from-purple-400 to-pink-500",
        requirements=LevelRequirements(
            min_accuracy=80,
            min_sessions=8,
            min_words_typed=100,
            min_consistency=65,
            specific_skills=("Can type 5+ letter words", "Comfortable with keyboard layout"),
        ),
        content_focus=ContentFocus(
            types=(WORDS, SENTENCES),
            difficulty=(EASY, MEDIUM),
            recommended_difficulty=EASY,
            focus_areas=(
                "Simple sentences",
                "Spacing between words",
                "Capital letters at start",
            ),
        ),
        rewards=LevelRewards(
            badge="🎯",
            celebration_message="You build amazing words! Let's make complete sentences!",
            unlocks=("Sentence practice", "Therapeutic sentences"),
        ),
    ),
    Level(
        id=4,
        name="Sentence Pro",
        title="Level 4: Sentence Pro",
        description="Writing complete sentences with confidence and accuracy.",
        icon="💬",
        color="from-orange-400 to-red-500",
        requirements=LevelRequirements(
            min_accuracy=85,
            min_sessions=12,
            min_words_typed=200,
            min_consistency=70,
            specific_skills=(
                "Can type complete sentences",
                "Good with capitals",
                "Consistent spacing",
            ),
        ),
        content_focus=ContentFocus(
            types=(SENTENCES,),
            difficulty=(EASY, MEDIUM, HARD),
            recommended_difficulty=MEDIUM,
            focus_areas=("Longer sentences", "Punctuation", "Proper capitalization"),
        ),
        rewards=LevelRewards(
            badge="🚀",
            celebration_message="You're a sentence pro! Ready for stories?",
            unlocks=("Hard difficulty sentences", "Story practice", "AI Lesson Plans"),
        ),
    ),
    Level(
        id=5,
        name="Story Teller",
        title="Level 5: Story Teller",
        description="Creating stories and typing longer passages with ease.",
        icon="📖",
        color="from-pink-400 to-rose-500",
        requirements=LevelRequirements(
            min_accuracy=88,
            min_sessions=15,
            min_words_typed=350,
            min_consistency=75,
            specific_skills=(
                "Can type paragraphs",
                "Strong punctuation",
                "Excellent spacing",
            ),
        ),
        content_focus=ContentFocus(
            types=(SENTENCES, STORIES),
            difficulty=(MEDIUM, HARD),
            recommended_difficulty=MEDIUM,
            focus_areas=("Story narratives", "Multiple sentences", "Creative expression"),
        ),
        rewards=LevelRewards(
            badge="📚",
            celebration_message="You tell wonderful stories! Keep exploring new adventures!",
            unlocks=("Story practice", "Advanced lessons", "Custom AI lessons"),
        ),
    ),
    Level(
        id=6,
        name="Typing Champion",
        title="Level 6: Typing Champion",
        description="Mastering advanced typing with speed and precision.",
        icon="👑",
        color="from-yellow-400 to-orange-500",
        requirements=LevelRequirements(
            min_accuracy=92,
            min_sessions=20,
            min_words_typed=500,
            min_consistency=80,
            specific_skills=(
                "Excellent accuracy",
                "Good typing speed",
                "Consistent performance",
            ),
        ),
        content_focus=ContentFocus(
            types=(SENTENCES, STORIES),
            difficulty=(MEDIUM, HARD),
            recommended_difficulty=HARD,
            focus_areas=("Speed building", "Complex sentences", "Advanced vocabulary"),
        ),
        rewards=LevelRewards(
            badge="🏆",
            celebration_message=(
                "You're a typing champion! You've mastered all the fundamentals!"
            ),
            unlocks=("All content types", "Speed challenges", "Expert mode"),
        ),
    ),
    Level(
        id=7,
        name="Expert Typist",
        title="Level 7: Expert Typist",
        description="Achieving expert-level typing skills with exceptional accuracy.",
        icon="⭐",
        color="from-indigo-400 to-purple-600",
        requirements=LevelRequirements(
            min_accuracy=95, min_sessions=30, min_words_typed=800, min_consistency=85,
        ),
        content_focus=ContentFocus(
            types=(SENTENCES, STORIES),
            difficulty=(HARD,),
            recommended_difficulty=HARD,
            focus_areas=("Maximum accuracy", "Sustained speed", "Perfect form"),
        ),
        rewards=LevelRewards(
            badge="💎",
            celebration_message="You're an expert typist! Your skills are incredible!",
            unlocks=("Expert challenges", "Speed tests", "All features"),
        ),
    ),
)

LEVELS_BY_ID: dict[int, Level] = {level.id: level for level in LEVELS}

MAX_LEVEL_ID = LEVELS[-1].id
