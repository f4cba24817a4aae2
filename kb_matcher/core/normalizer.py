"""Text normalization utilities for consistent query and index keys."""

import re
from typing import List


class TextNormalizer:
    """Reduces text to a canonical comparable form."""
    
    def __init__(self) -> None:
        """Initialize the normalizer."""
        # Compile regex patterns for performance
        self.punctuation_regex = re.compile(r'[^\w\s]')
        self.whitespace_regex = re.compile(r'\s+')
        
    def normalize(self, text: str) -> str:
        """
        Normalize text for indexing and querying.
        
        Lower-cases, strips punctuation, collapses whitespace runs to a
        single space and trims. Total: any input yields a string.
        
        Args:
            text: Input text to normalize
            
        Returns:
            Normalized text
        """
        if not text:
            return ""
        
        normalized = text.lower()
        normalized = self.punctuation_regex.sub('', normalized)
        normalized = self.whitespace_regex.sub(' ', normalized)
        
        return normalized.strip()
    
    def tokenize(self, text: str) -> List[str]:
        """
        Tokenize text into words.
        
        Args:
            text: Input text
            
        Returns:
            List of tokens (empty for blank input)
        """
        normalized = self.normalize(text)
        if not normalized:
            return []
        
        return normalized.split(' ')
