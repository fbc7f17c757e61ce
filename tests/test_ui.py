"""Tests for Spiegel console output helpers."""

from io import StringIO

from rich.console import Console


def _console():
    return Console(file=StringIO(), width=120, color_system=None)


class TestMaskSecrets:
    """Test secret masking."""

    def test_key_value_pairs(self):
        from spiegel.wizard.ui import mask_secrets

        masked = mask_secrets("password=hunter2 token: 'abc'")
        assert "hunter2" not in masked
        assert "abc" not in masked

    def test_known_formats(self):
        from spiegel.wizard.ui import mask_secrets

        assert mask_secrets("use ghp_" + "a" * 36) == "use ********"

    def test_plain_text_untouched(self):
        from spiegel.wizard.ui import mask_secrets

        assert mask_secrets("Rendered step 'welcome'") == "Rendered step 'welcome'"
        assert mask_secrets("") == ""

    def test_is_secret_key(self):
        from spiegel.wizard.ui import is_secret_key

        assert is_secret_key("API_KEY")
        assert not is_secret_key("view")


class TestWizardUI:
    """Test console rendering."""

    def test_step_header_shows_progress(self):
        from spiegel.wizard.ui import WizardUI

        console = _console()
        ui = WizardUI(console, total_steps=3)
        ui.print_step_header(2, "step2")

        assert "Step 2/3: step2" in console.file.getvalue()

    def test_spiegel_error(self):
        from spiegel.wizard.exceptions import UnknownStepError
        from spiegel.wizard.ui import WizardUI

        console = _console()
        WizardUI(console).print_spiegel_error(UnknownStepError("Unknown step 'x'.", step="x"))

        output = console.file.getvalue()
        assert "Error: Unknown step 'x'." in output
        assert "To fix:" in output

    def test_summary_table_masks_secrets(self):
        from spiegel.wizard.ui import WizardUI

        console = _console()
        WizardUI(console).show_summary_table("Context", {"api_token": "s3cr3t", "view": "a.html"})

        output = console.file.getvalue()
        assert "s3cr3t" not in output
        assert "a.html" in output
