#! /usr/bin/env python3

# Hardware wallet interaction script

if __name__ == '__main__':
    from hwethlib._cli import main
    main()
else:
    raise ImportError('hweth is not importable. Import hwethlib instead')
