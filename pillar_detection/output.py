"""CSV writers for decoded objects."""
import numpy as np

OBJECT_CSV_HEADER = ("timestamp,id,type,sub_type,theta,"
                     "cx,cy,cz,dx,dy,dz,"
                     "wx_min,wy_min,wz_min,wx_max,wy_max,wz_max\n")


def write_objects_csv(filepath: str, frames: list):
    """Write decoded objects, one row per object.

    World-frame extents are the axis-aligned bounds of the world corners.

    Args:
        filepath: Output file path.
        frames: List of (timestamp, [DetectedObject, ...]) tuples.
    """
    with open(filepath, 'w') as f:
        f.write(OBJECT_CSV_HEADER)
        for ts, objects in frames:
            for obj in objects:
                lo = np.min(obj.corners_world, axis=0)
                hi = np.max(obj.corners_world, axis=0)
                f.write(f"{ts:.6f},{obj.id},{obj.type.name},{obj.sub_type.name},"
                        f"{obj.theta:.6f},"
                        f"{obj.center[0]:.6f},{obj.center[1]:.6f},"
                        f"{obj.center[2]:.6f},"
                        f"{obj.size[0]:.6f},{obj.size[1]:.6f},{obj.size[2]:.6f},"
                        f"{lo[0]:.6f},{lo[1]:.6f},{lo[2]:.6f},"
                        f"{hi[0]:.6f},{hi[1]:.6f},{hi[2]:.6f}\n")


def write_corners_csv(filepath: str, frames: list):
    """Write the 8 sensor and world corners of each object.

    Columns: timestamp,id,corner,x,y,z,wx,wy,wz

    Args:
        filepath: Output file path.
        frames: List of (timestamp, [DetectedObject, ...]) tuples.
    """
    with open(filepath, 'w') as f:
        f.write("timestamp,id,corner,x,y,z,wx,wy,wz\n")
        for ts, objects in frames:
            for obj in objects:
                for k in range(8):
                    c = obj.corners[k]
                    w = obj.corners_world[k]
                    f.write(f"{ts:.6f},{obj.id},{k},"
                            f"{c[0]:.6f},{c[1]:.6f},{c[2]:.6f},"
                            f"{w[0]:.6f},{w[1]:.6f},{w[2]:.6f}\n")
