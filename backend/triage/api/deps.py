from triage.services.report_writer import ReportWriter


def get_report_writer() -> ReportWriter:
    """Report writer built from the current settings."""
    return ReportWriter()
