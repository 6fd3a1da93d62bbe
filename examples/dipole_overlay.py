from emviz.scene import ChargeScene
from emviz.renderer import RecordingSurface, VectorOverlayRenderer

scene = ChargeScene(width=800, height=600, seed=0)
scene.set_show_forces(True)
renderer = VectorOverlayRenderer(RecordingSurface(800, 600), scene.config)

# Dipole plus a weak test charge above it
scene.add_charge(5.0, "positive", position=(300, 300), charge_id="plus")
scene.add_charge(5.0, "negative", position=(500, 300), charge_id="minus")
scene.add_charge(1.0, "positive", position=(400, 150), charge_id="q3")

scene.frame(renderer)

surface = renderer.surface
print("field arrows", len(surface.named("fieldVector")))
print("force arrows", len(surface.named("electricForceVector")))
for c in scene.charges:
    t = c.electric_force.total
    print(c.id, "|F| sum", t.magnitude, "|sum F|", t.resultant_magnitude, "dir", t.direction)

renderer.highlight_forces_from_charge("plus")
print("labels", sorted({d.text for d in surface.of_kind("text")}))
