class ConversionError(Exception):
    code = 0

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"Error[{self.code}]: {self.message}"


# ---------- Template ----------


class TemplateError(ConversionError):
    code = 1


class MissingTimePlaceholder(TemplateError):
    code = 1


class MissingCommentPlaceholder(TemplateError):
    code = 1


class PatternCompileFailed(TemplateError):
    code = 2


# ---------- Time ----------


class TimeError(ConversionError, ValueError):
    code = 4


class InvalidEpoch(TimeError):
    pass


class InvalidTimestamp(TimeError):
    pass


# ---------- Parse ----------


class ParseError(ConversionError):
    def __init__(self, path, line_number):
        super().__init__(f"Unable to parse file: {path} (line {line_number})")
        self.path = path
        self.line_number = line_number


class LineMismatch(ParseError):
    code = 3


class TimeDecodeFailed(ParseError):
    code = 4


# ---------- Settings ----------


class SettingsError(ConversionError):
    def __str__(self):
        return f"Error: {self.message}"
