from .keyword_scanner import SUSPICIOUS_KEYWORDS, SecurityReport, analyze_for_security

__all__ = ["SUSPICIOUS_KEYWORDS", "SecurityReport", "analyze_for_security"]
