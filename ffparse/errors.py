"""
ffparse error types.

All errors inherit from FFParseError for easy catching.

None of these are raised for unexpected ffmpeg text: extractors report
unrecognised lines through their success indicator. These errors signal
programming or configuration mistakes.
"""


class FFParseError(Exception):
    """Base exception for all ffparse failures."""
    pass


class PatternRegistryError(FFParseError):
    """Raised when the pattern table is incomplete or queried with an unknown tag."""
    
    def __init__(self, tag: object, reason: str):
        self.tag = tag
        self.reason = reason
        super().__init__(f"Pattern registry error for {tag!r}: {reason}")


class SettingsError(FFParseError):
    """Raised when a configuration value cannot be used."""
    
    def __init__(self, name: str, value: object, reason: str):
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid setting {name}={value!r}: {reason}")
