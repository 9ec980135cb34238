# Commutr: commute-learning playlist core
# Package: src.commutr

__version__ = "1.0.0-dev"
__author__ = "Commutr Contributors"
__description__ = "Duration-constrained playlist selection and mid-session top-ups"

# Module structure:
#   - commutr.recommend : Candidate model, selector, playlist builder, vibes
#   - commutr.player    : Event bus, remaining-time tracker, top-up controller
#   - commutr.config    : Configuration management
