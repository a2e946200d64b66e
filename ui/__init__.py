"""Screen side controllers that drive the workout core with Kivy's clock."""
