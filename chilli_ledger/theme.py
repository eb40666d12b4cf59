class Theme:
    LIGHT = {
        "bg_primary": "#F5F5F4",      # Main background (stone)
        "bg_secondary": "#FFFFFF",    # Cards, tables
        "bg_header": "qlineargradient(x1:0, y1:0, x2:1, y2:0, stop:0 #7F1D1D, stop:1 #C2410C)", # Chilli red to orange
        "text_primary": "#1C1917",
        "text_secondary": "#57534E",
        "text_header": "#FFFFFF",
        "accent": "#DC2626",
        "accent_hover": "#B91C1C",
        "border": "#E7E5E4",
        "card_bg": "#FFFFFF",
        "card_border": "#E7E5E4",
        "success": "#059669",
        "danger": "#DC2626",
        "warning": "#D97706",
        "info": "#2563EB",
    }

    DARK = {
        "bg_primary": "#0C0A09",
        "bg_secondary": "#1C1917",
        "bg_header": "qlineargradient(x1:0, y1:0, x2:1, y2:0, stop:0 #450A0A, stop:1 #7C2D12)",
        "text_primary": "#FAFAF9",
        "text_secondary": "#A8A29E",
        "text_header": "#FFFFFF",
        "accent": "#F87171",
        "accent_hover": "#EF4444",
        "border": "#44403C",
        "card_bg": "#1C1917",
        "card_border": "#44403C",
        "success": "#34D399",
        "danger": "#F87171",
        "warning": "#FBBF24",
        "info": "#60A5FA",
    }


class ThemeManager:
    """Current color palette, persisted in the settings table."""

    def __init__(self, db_manager):
        self.db = db_manager
        self.current_theme_name = self.db.get_setting("app_theme", "Light")
        self.colors = Theme.LIGHT if self.current_theme_name == "Light" else Theme.DARK

    def set_theme(self, theme_name):
        self.current_theme_name = theme_name
        self.db.set_setting("app_theme", theme_name)
        self.colors = Theme.LIGHT if theme_name == "Light" else Theme.DARK

    def toggle_theme(self):
        new_theme = "Dark" if self.current_theme_name == "Light" else "Light"
        self.set_theme(new_theme)
        return new_theme

    def get_color(self, key):
        return self.colors.get(key, "#ff0000")  # Red if key missing

    @property
    def is_dark(self):
        return self.current_theme_name == "Dark"
