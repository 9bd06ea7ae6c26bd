"""scouter.crawler: priority-driven crawl scheduler and its collaborators."""
