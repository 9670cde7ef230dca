"""TechAssist: retrieval-augmented answers for field technicians."""
