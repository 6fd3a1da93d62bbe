from emviz.renderer import Drawable, OverlayCategory, OverlayRegistry, VectorPool


def test_pool_creates_then_reuses():
    pool = VectorPool(lambda: Drawable(kind="vector"), capacity=2)
    a = pool.acquire()
    a.name = "old"
    a.line(0, 0, 10, 0)
    assert pool.created == 1

    assert pool.release(a)
    b = pool.acquire()
    assert b is a
    assert b.name == "" and b.segments == []
    assert pool.reused == 1


def test_pool_drops_beyond_capacity():
    pool = VectorPool(lambda: Drawable(kind="vector"), capacity=1)
    d1, d2 = pool.acquire(), pool.acquire()
    assert pool.release(d1)
    assert not pool.release(d2)
    assert len(pool) == 1


def test_registry_take_and_discard():
    reg = OverlayRegistry()
    a, b, c = Drawable("vector"), Drawable("vector"), Drawable("text")
    reg.register(OverlayCategory.VELOCITY, a, key="q1")
    reg.register(OverlayCategory.VELOCITY, b, key="q2")
    reg.register(OverlayCategory.FORCE_LABEL, c, key="q1")

    assert reg.discard(OverlayCategory.VELOCITY, "q1") == [a]
    assert reg.items(OverlayCategory.VELOCITY) == [b]
    assert reg.lookup(OverlayCategory.FORCE_LABEL, "q1") == [c]

    assert reg.take(OverlayCategory.VELOCITY) == [b]
    assert reg.count(OverlayCategory.VELOCITY) == 0
    assert reg.keyed(OverlayCategory.VELOCITY) == {}
    assert reg.count(OverlayCategory.FORCE_LABEL) == 1
