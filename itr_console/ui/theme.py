import flet as ft


class AppTheme:
    """
    Centralized theme configuration for the console.
    Clinical palette: navy primary with a medical teal accent.
    """

    font_family = "Inter"

    # Colors - Light
    primary_light = "#1e3a5f"
    on_primary_light = "#ffffff"
    secondary_light = "#0d9488"
    surface_light = "#ffffff"
    error_light = "#dc2626"

    # Colors - Dark
    primary_dark = "#60a5fa"
    on_primary_dark = "#0b1220"
    secondary_dark = "#2dd4bf"
    surface_dark = "#111827"

    # Onboarding status badges
    status_colors = {
        "pending": "amber",
        "inprogress": "blue",
        "scheduled": "purple",
        "completed": "green",
        "rejected": "red",
    }

    @classmethod
    def light_theme(cls) -> ft.Theme:
        return ft.Theme(
            color_scheme=ft.ColorScheme(
                primary=cls.primary_light,
                on_primary=cls.on_primary_light,
                secondary=cls.secondary_light,
                surface=cls.surface_light,
                error=cls.error_light,
            ),
            font_family=cls.font_family,
            use_material3=True,
        )

    @classmethod
    def dark_theme(cls) -> ft.Theme:
        return ft.Theme(
            color_scheme=ft.ColorScheme(
                primary=cls.primary_dark,
                on_primary=cls.on_primary_dark,
                secondary=cls.secondary_dark,
                surface=cls.surface_dark,
                error=cls.error_light,  # Keep red for error
            ),
            font_family=cls.font_family,
            use_material3=True,
        )

    @classmethod
    def status_color(cls, status: str) -> str:
        return cls.status_colors.get(status, "grey")
