from .metrics import BaseMetrics, CovenantMetrics, NullMetrics

__all__ = ["BaseMetrics", "CovenantMetrics", "NullMetrics"]
