"""
Routers per API insight-processor.

Moduli:
- files: parsing file (POST /api/files/parse)
- insights: generazione insight (POST /api/insights/generate)
- reports: assemblaggio report (POST /api/reports/generate, POST /api/reports/from-file)
"""
from . import files, insights, reports

__all__ = ["files", "insights", "reports"]
