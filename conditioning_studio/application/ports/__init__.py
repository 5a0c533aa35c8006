"""Application ports for Conditioning Studio.

Ports define the seams through which the engine reaches the outside
world. The only one the session engine needs is its clock.
"""

from conditioning_studio.application.ports.clock import Clock, SystemClock, system_clock

__all__: list[str] = ["Clock", "SystemClock", "system_clock"]
