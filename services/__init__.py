"""
Initialize services package
"""

from .canonicalizer import FilterCanonicalizer, fallback_parse
from .crustdata_client import CrustdataClient
from .mistral_analyzer import MistralAnalyzer
from .pipeline import SearchPipeline, PipelineResult, PipelineState, StepOutcome, parse_prompt

__all__ = [
    'FilterCanonicalizer', 'fallback_parse', 'CrustdataClient', 'MistralAnalyzer',
    'SearchPipeline', 'PipelineResult', 'PipelineState', 'StepOutcome', 'parse_prompt'
]
