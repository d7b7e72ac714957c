# exceptions.py


class LBMError(Exception):
    """Base class for every fatal error raised by the simulation."""

    def __init__(self, message, path=None, line=None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.line = line

    def location(self):
        if self.path is None:
            return None
        if self.line is None:
            return f"file {self.path}"
        return f"line {self.line} of file {self.path}"

    def __str__(self):
        where = self.location()
        if where is None:
            return self.message
        return f"Error at {where}:\n{self.message}"


class ConfigurationError(LBMError):
    pass


class ParameterFileError(ConfigurationError):
    pass


class ObstacleFileError(ConfigurationError):
    pass


class ResultsFileError(LBMError):
    pass


class AllocationError(LBMError):
    pass
