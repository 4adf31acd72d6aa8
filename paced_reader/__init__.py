"""
Paced reader core package.

Splits a document into overlapping chunks and presents them at a steady pace,
driven by voice-style text commands. A nested lookup mode pauses reading to
define a word and then returns to the same place. Text acquisition, the
transcript stream, the display and the definition service are collaborators
behind small protocols.
"""
