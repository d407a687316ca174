from .pull import Done, ImmediateProducer, Next, Pulled, SuspendingProducer
from .source import Immediate, Source, Suspending, adapt, adapt_async, lifted, try_adapt, try_adapt_async

__all__ = (
    # Pull results
    "Done",
    "Next",
    "Pulled",
    # Producers
    "ImmediateProducer",
    "SuspendingProducer",
    # Sources
    "Immediate",
    "Source",
    "Suspending",
    "adapt",
    "adapt_async",
    "lifted",
    "try_adapt",
    "try_adapt_async",
)
