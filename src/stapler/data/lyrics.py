"""Lines of a short song used as demo list content."""

LYRICS: tuple[str, ...] = (
    "Morning light across the harbor",
    "Gulls are calling out my name",
    "Every boat that leaves the water",
    "Never comes back quite the same",
    "I kept a lantern in the window",
    "Kept a promise in my hand",
    "Paged through every single letter",
    "Trying hard to understand",
    "Page by page the story gathers",
    "Line by line the tide comes in",
    "One more page and then another",
    "Till the ending meets the beginning",
    "Ropes are fraying on the mooring",
    "Salt is written on the door",
    "Still I hear the engine turning",
    "Somewhere out beyond the shore",
    "Page by page the story gathers",
    "Line by line the tide comes in",
    "One more page and then another",
    "Till the ending meets the beginning",
    "Morning light across the harbor",
    "Gulls have gone and so have you",
    "Every page that I have gathered",
)
