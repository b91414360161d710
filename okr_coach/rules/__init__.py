"""
Declarative rule tables for detection, scoring and phase control.

Modules:
- anti_patterns: anti-pattern catalogue and reframing strategies
- quality: objective and key result rubric vocabulary
- phases: transition table, backtrack and business-context patterns
- checkpoints: per-phase checkpoint catalogue
- confirmation: confirmation and confusion patterns
"""
