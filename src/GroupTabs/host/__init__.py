from .simulated import SimulatedDisplay, SimulatedPointer, SimulatedWindow

__all__ = ["SimulatedDisplay", "SimulatedPointer", "SimulatedWindow"]
