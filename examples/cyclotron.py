from emviz.scene import ChargeScene
from emviz.types import Velocity
from emviz.renderer import RecordingSurface, VectorOverlayRenderer

scene = ChargeScene(width=1200, height=800)
renderer = VectorOverlayRenderer(RecordingSurface(1200, 800), scene.config)

# Uniform field out of the plane; opposite charges circle in opposite senses
scene.set_magnetic_field((0.0, 0.0, 0.5))
scene.set_mode("magnetic")
a = scene.add_charge(2.0, "positive", position=(400, 400), velocity=Velocity(60.0, (1.0, 0.0)))
b = scene.add_charge(2.0, "negative", position=(800, 400), velocity=Velocity(60.0, (1.0, 0.0)))

scene.start()
for _ in range(600):
    scene.frame(renderer, dt=1/120)

print("a pos", a.position, "speed", a.velocity.magnitude, "trail", len(a.trail))
print("b pos", b.position, "speed", b.velocity.magnitude, "trail", len(b.trail))

scene.reset()
print("after reset", a.position, b.position)
