from lumiose_map.cli import main

main()
