"""
Spiegel Step Wizard

Step sequencing, loading and rendering for the wizard.
"""

from spiegel.wizard.orchestrator import RenderResult, WizardOrchestrator
from spiegel.wizard.renderer import Page, StepRenderer
from spiegel.wizard.repository import StepDescriptor, StepRepository
from spiegel.wizard.sequencer import StepSequencer
from spiegel.wizard.ui import WizardUI

__all__ = [
    "Page",
    "RenderResult",
    "StepDescriptor",
    "StepRenderer",
    "StepRepository",
    "StepSequencer",
    "WizardOrchestrator",
    "WizardUI",
]
