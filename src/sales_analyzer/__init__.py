def main() -> int:
    """Entry point for the application.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    from sales_analyzer.api.main import main as api_main

    api_main()
    return 0
