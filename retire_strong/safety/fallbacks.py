"""Canned replacement messages for blocked text."""

MODIFY_DISCLAIMER = (
    "\n\nNote: This is general guidance. Always listen to your body and consult healthcare providers as needed."
)

SAFE_FALLBACK_MESSAGES: dict[str, str] = {
    "default": (
        "I want to make sure I'm giving you safe, appropriate guidance. Let me rephrase that in a way "
        "that's more helpful for your wellness journey.\n\n"
        "Remember, this is general fitness guidance designed to support your goals. If you have specific "
        "health concerns, it's always best to discuss them with your healthcare provider."
    ),
    "medical_advice": (
        "I appreciate your question, but I'm not able to provide medical advice or diagnosis.\n\n"
        "For health concerns or symptoms, please consult with your doctor or healthcare provider. They can "
        "give you personalized guidance based on your complete health history.\n\n"
        "I'm here to support you with exercise guidance and motivation within safe, general wellness principles."
    ),
    "unsafe_exercise": (
        "I want to make sure any movement recommendations are safe and appropriate for you.\n\n"
        "Let's focus on exercises that are well-suited to your current fitness level and any limitations "
        "you've shared. Building strength and confidence happens gradually and safely.\n\n"
        "If you'd like to explore a specific type of movement, let me know and I can suggest safer alternatives."
    ),
    "over_promising": (
        "I'm excited about your wellness journey, but I want to set realistic expectations.\n\n"
        "Movement and exercise can bring wonderful benefits: better balance, more energy, greater confidence "
        "in daily activities. But results vary for everyone and take consistent effort over time.\n\n"
        "Let's focus on building sustainable habits that work for your life and goals."
    ),
    "inappropriate": (
        "Let's keep our conversation focused on what matters most: your health, strength, and confidence "
        "as you age.\n\n"
        "I'm here to support you with practical exercise guidance and encouragement that respects your "
        "goals and experience."
    ),
    "intensity_warning": (
        "Safety is always our top priority. For anyone starting or returning to exercise, especially over 50, "
        "it's important to build gradually.\n\n"
        "We'll make sure you're starting at an appropriate level and progressing at a pace that keeps you "
        "safe while building strength and confidence.\n\n"
        "If you experience any pain or discomfort, stop and let me know so we can adjust."
    ),
}

# First keyword hit in the block reason picks the message
_REASON_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("medical", "diagnosis"), "medical_advice"),
    (("unsafe", "pain"), "unsafe_exercise"),
    (("promising", "guarantee"), "over_promising"),
    (("inappropriate", "sexual"), "inappropriate"),
    (("intensity", "effort"), "intensity_warning"),
)


def get_fallback_message(reason: str | None) -> str:
    """Pick the canned message that matches a block reason."""
    lowered = (reason or "").lower()
    for keywords, key in _REASON_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return SAFE_FALLBACK_MESSAGES[key]
    return SAFE_FALLBACK_MESSAGES["default"]
