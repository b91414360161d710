"""Confirmation, new-information and confusion patterns.

All patterns are matched case-insensitively against the trimmed message.
"""

CONFIRMATION_PATTERNS = (
    # Strong confirmations
    r"^yes\b",
    r"^correct\b",
    r"^right\b",
    r"^exactly\b",
    r"^perfect\b",
    r"^absolutely\b",
    r"^definitely\b",
    r"^agreed\b",
    r"^confirmed\b",
    # Common phrases
    r"that'?s?\s+(right|correct|perfect|good|great|fine|okay)\b",
    r"looks?\s+(good|perfect|great|fine|right|correct)\b",
    r"sounds?\s+(good|perfect|great|fine|right)\b",
    # Agreement phrases
    r"let'?s?\s+(proceed|continue|move\s+(on|forward|ahead)|go\s+ahead)\b",
    r"go\s+ahead\b",
    r"please\s+(proceed|continue)\b",
    r"ready\s+to\s+(proceed|continue|move\s+on)\b",
    # Emoji
    "\U0001F44D",
    "✓",
    "✅",
    # Affirmative with action
    r"yes,?\s*(let'?s|we can|please|go ahead)",
    r"correct,?\s*(let'?s|please|proceed)",
)

STRONG_CONFIRMATION_PATTERNS = (
    r"^yes\b",
    r"^correct\b",
    r"^exactly\b",
    r"^perfect\b",
    r"^absolutely\b",
    r"^definitely\b",
    r"^confirmed\b",
    r"^agreed\b",
    r"that'?s?\s+exactly\s+right\b",
    r"yes,?\s+that'?s?\s+(right|correct|perfect)\b",
)

# Signals that the user is adding substance rather than agreeing
NEW_INFORMATION_PATTERNS = (
    # Questions
    r"\?$",
    r"^(what|where|when|who|why|how|which|can|could|would|should)\b",
    # Corrections
    r"^(no|not|never|actually|instead|rather)\b",
    r"\b(but|however|although|except)\b",
    # New details
    r"\b(also|additionally|furthermore|moreover|plus|and)\b",
    # Explanations
    r"\b(because|since|due to|reason|specifically)\b",
)

CONFUSION_PATTERNS = (
    r"\?$",
    r"^(what|where|when|who|why|how|which)\b",
    r"\b(confused|unclear|don'?t understand|not sure|clarify|explain)\b",
    r"^(can you|could you|would you|please)\b",
    r"\b(mean by|referring to|talking about)\b",
)

SHORT_MESSAGE_WORDS = 10
NEW_INFORMATION_MIN_WORDS = 15
LONG_MESSAGE_WORDS = 20
