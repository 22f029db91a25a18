"""Configuration constants for the scoring and reporting pipeline."""
from __future__ import annotations

import os

# Weakest categories named in the "areas for improvement" insight
MAX_WEAK_CATEGORIES: int = int(os.getenv("REPORT_MAX_WEAK_CATEGORIES", "3"))

# Strongest categories named in the "strengths" insight
MAX_STRONG_CATEGORIES: int = int(os.getenv("REPORT_MAX_STRONG_CATEGORIES", "2"))

# Category-specific texts appended to the base recommendations
MAX_CATEGORY_RECOMMENDATIONS: int = int(
    os.getenv("REPORT_MAX_CATEGORY_RECOMMENDATIONS", "3")
)

# Prioritized recommendations per tier in the consolidated report
MAX_HIGH_PRIORITY: int = int(os.getenv("REPORT_MAX_HIGH_PRIORITY", "3"))
MAX_MEDIUM_PRIORITY: int = int(os.getenv("REPORT_MAX_MEDIUM_PRIORITY", "2"))

# Templated insight strings per category summary
MAX_CATEGORY_INSIGHTS: int = int(os.getenv("REPORT_MAX_CATEGORY_INSIGHTS", "2"))

# Category weight from which a low score counts as critical
CRITICAL_CATEGORY_WEIGHT: int = int(os.getenv("REPORT_CRITICAL_CATEGORY_WEIGHT", "4"))
