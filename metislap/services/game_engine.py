"""Common capability interface implemented by each game type."""


class GameEngine:
    """
    Engine hooks called by the room lifecycle manager. Hooks only touch
    engine-owned state; the lifecycle manager owns status and timestamps and
    commits once per action.
    """

    game_type = None

    def start(self, room, **options):
        """Validate minimum content and initialize engine state. Raise before mutating."""
        raise NotImplementedError

    def advance(self, room, **options):
        """Move to the next step. Return False when there is nothing left and the game should finish."""
        raise NotImplementedError

    def finish(self, room):
        """Clear progress pointers when the game ends."""

    def reset(self, room):
        """Clear progress pointers when the room goes back to waiting."""
        self.finish(room)
