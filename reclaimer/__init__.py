"""Docker Disk Reclaimer: очистка неиспользуемых ресурсов Docker и отчёт о диске."""

__version__ = "1.0.0"
