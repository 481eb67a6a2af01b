class JinjaError(Exception):
    """ Base class for all zinja errors"""
    pass


class JinjaLexError(JinjaError):
    """ Raised when the source text cannot be tokenized"""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}")
        self.position = position


class JinjaSyntaxError(JinjaError):
    """ Raised when the token stream does not form a valid template"""

    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)
        self.position = position


class JinjaRuntimeError(JinjaError):
    """ Raised when rendering fails"""


class JinjaTypeError(JinjaRuntimeError):
    """ Raised when the operands of an operation have unsupported types"""


class JinjaArityError(JinjaRuntimeError):
    """ Raised when the arguments passed to a macro, filter, test or function do not bind"""


class JinjaNameError(JinjaRuntimeError):
    """ Raised when a filter or test name cannot be resolved"""


class TemplateException(JinjaRuntimeError):
    """ Raised by the raise_exception() global from inside a template"""
