"""
Report: assemblaggio sezioni da modello tabellare e insight.
"""
from reports.assembler import ChartDescriptor, Report, ReportSection, generate_report

__all__ = ["ChartDescriptor", "Report", "ReportSection", "generate_report"]
