"""Game constants for Euchre."""

# Table
NUM_SEATS = 4
HAND_SIZE = 5
TRICKS_PER_HAND = 5
DECK_SIZE = 24
KITTY_SIZE = 3  # Left in the deck after the deal and the up-card

# Scoring
WINNING_SCORE = 10
MAKER_POINTS = 1  # Makers take 3 or 4 tricks
MARCH_POINTS = 2  # Makers take all 5
LONER_MARCH_POINTS = 4  # Lone hand takes all 5
EUCHRE_POINTS = 2  # Makers take 2 or fewer, awarded to defenders
MAJORITY_TRICKS = 3

# Player-facing logs
MESSAGE_LOG_SIZE = 15
CHAT_HISTORY_SIZE = 50

# Publisher service
REDIS_PUBLISH_TIMEOUT = 5
