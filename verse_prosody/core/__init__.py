"""Core prosody analysis: pronunciations, meter and rhyme scheme."""

from .cmudict_loader import CMUDictLoader, PronunciationStore, parse_cmu_line
from .meter import (
    FREE_VERSE,
    MIXED_OR_FREE_VERSE,
    best_foot,
    classify_line,
    classify_text,
    meter_info,
    syllable_count_label,
)
from .models import (
    UNLABELED,
    ComplianceStatus,
    FootType,
    InternalRhyme,
    LineCompliance,
    LineRhyme,
    MeterLabel,
    Pronunciation,
    PronunciationEntry,
    PronunciationSource,
    Resolution,
    RhymeFingerprint,
    RhymeQuality,
    RhymeScheme,
    StressSequence,
    Syllable,
    TextMeter,
)
from .resolver import PronunciationResolver
from .rhyme_scheme import (
    EXACT_VOWELS,
    FORM_SCHEMES,
    RELATED_VOWELS,
    SlantPolicy,
    assign_scheme,
    check_form_compliance,
    compare,
    expected_scheme,
    fingerprint,
    identify_scheme_type,
    internal_rhymes,
)
from .scansion import (
    SYLLABLE_PATTERNS,
    analyze_line,
    check_syllable_pattern,
    is_haiku,
    line_syllable_counts,
    render_scansion,
    stress_pattern_to_string,
    stress_visualization,
    syllable_consistency,
)

__all__ = [
    "CMUDictLoader",
    "PronunciationStore",
    "parse_cmu_line",
    "PronunciationResolver",
    "ComplianceStatus",
    "FootType",
    "InternalRhyme",
    "LineCompliance",
    "LineRhyme",
    "MeterLabel",
    "Pronunciation",
    "PronunciationEntry",
    "PronunciationSource",
    "Resolution",
    "RhymeFingerprint",
    "RhymeQuality",
    "RhymeScheme",
    "StressSequence",
    "Syllable",
    "TextMeter",
    "UNLABELED",
    "FREE_VERSE",
    "MIXED_OR_FREE_VERSE",
    "best_foot",
    "classify_line",
    "classify_text",
    "meter_info",
    "syllable_count_label",
    "EXACT_VOWELS",
    "RELATED_VOWELS",
    "FORM_SCHEMES",
    "SlantPolicy",
    "assign_scheme",
    "check_form_compliance",
    "compare",
    "expected_scheme",
    "fingerprint",
    "identify_scheme_type",
    "internal_rhymes",
    "SYLLABLE_PATTERNS",
    "analyze_line",
    "check_syllable_pattern",
    "is_haiku",
    "line_syllable_counts",
    "render_scansion",
    "stress_pattern_to_string",
    "stress_visualization",
    "syllable_consistency",
]
