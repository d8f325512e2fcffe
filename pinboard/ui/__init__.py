"""CustomTkinter presentation layer.

``routes``, ``scroll_lock``, ``icons`` and ``theme`` import no Tk code so
they can be used headless; everything else builds widgets.
"""
