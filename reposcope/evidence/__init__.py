"""Evidence assembly: everything gathered from the source host before prompting."""

from reposcope.evidence.assembler import EvidenceAssembler
from reposcope.evidence.key_files import fetch_files, fetch_key_files, select_key_paths
from reposcope.evidence.models import EvidenceBundle
from reposcope.evidence.tech_stack import detect_tech_stack

__all__ = [
    "EvidenceAssembler",
    "EvidenceBundle",
    "detect_tech_stack",
    "fetch_files",
    "fetch_key_files",
    "select_key_paths",
]
