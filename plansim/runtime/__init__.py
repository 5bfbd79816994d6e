from plansim.runtime.interpreter import Interpreter, UnavailableInterpreter, load_interpreter

__all__ = ["Interpreter", "UnavailableInterpreter", "load_interpreter"]
