"""TrekPrep Engine — configuration, error hierarchy, structured logging."""
